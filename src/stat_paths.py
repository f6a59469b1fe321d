from pathlib import Path
import os

DATA_DIR = Path(os.getenv("CSB_DATA_DIR", "data")).resolve()


def data_path(name: str, data_dir: Path | None = None) -> Path:
    return (data_dir or DATA_DIR) / name
