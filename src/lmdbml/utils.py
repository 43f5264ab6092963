"""Utility functions for naming extracted bitmaps."""

from pathlib import Path
from typing import Optional, Union


def derive_output_filename(
    input_filepath: Union[str, Path], index: int, output_dir: Optional[Union[str, Path]] = None
) -> Path:
    """
    Derive the output path of entry `index` from the container's path.

    The container's extension is replaced by `.<index>.bmp`, so `TITLE.LMD`
    gives `TITLE.0.bmp`, `TITLE.1.bmp`, ... A name without an extension keeps
    its full name as the stem.

    Args:
        input_filepath: Path of the container file
        index: Entry index in the offset table
        output_dir: Directory to place the file in (defaults to the container's directory)

    Returns:
        Path of the output file
    """
    input_path = Path(input_filepath)
    directory = Path(output_dir) if output_dir is not None else input_path.parent
    return directory / f"{input_path.stem}.{index}.bmp"
