from includeprune.cli import app

app(prog_name="includeprune")
