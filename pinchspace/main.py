from __future__ import annotations

from pinchspace.runtime.run_webcam import main


if __name__ == "__main__":
    main()
