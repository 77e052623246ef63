from drivesweep.cli import app

app()
