from error_triage.orchestration.cli import cli

if __name__ == "__main__":
    cli()
