from aoflux.cli.app import cli

cli()
