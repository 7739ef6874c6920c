"""Allow ``python -m cmsweep``."""

from cmsweep.cli.main import app

app(prog_name="cmsweep")
