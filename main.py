"""PySide6 entrypoint: launches the PhotoGrid window from photogrid.main."""

import sys

try:
    from photogrid.main import main
except Exception as exc:
    # Provide a clear error if imports fail due to PYTHONPATH issues
    raise RuntimeError("Failed to import photogrid. Ensure project root is on PYTHONPATH.") from exc


if __name__ == "__main__":
    sys.exit(main())
