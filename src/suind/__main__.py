from suind.cli import cli

cli()
