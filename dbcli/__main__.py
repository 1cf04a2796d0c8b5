from dbcli.cli import run

run()
