"""Run the BMT server with uvicorn."""

import os

import uvicorn


def main() -> None:
    """Serve the app on PORT (default 5000)."""
    uvicorn.run("bmt.main:app", host="0.0.0.0", port=int(os.environ.get("PORT", "5000")))


if __name__ == "__main__":
    main()
