from .agent import cli

cli()
