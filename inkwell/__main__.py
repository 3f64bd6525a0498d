"""Entry point for running the Inkwell service via `python -m inkwell`."""

from inkwell import InkwellService
from inkwell.config import get_inkwell_config

if __name__ == "__main__":
    config = get_inkwell_config()

    print(f"Starting Inkwell service at http://{config.HOST}:{config.PORT} ...")
    print("Press Ctrl+C to stop.")

    InkwellService.launch(settings=config)
