from grocery_shelf.cli import cli

cli()
