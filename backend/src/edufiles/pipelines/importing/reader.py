from typing import BinaryIO, List

import pandas as pd

from edufiles.pipelines.importing.models import Row

# .xlsx is a zip archive, .xls an OLE2 compound document
_WORKBOOK_MAGIC = (
    b"PK\x03\x04",
    b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1",
)


def _read_head(source: BinaryIO, size: int = 8) -> bytes:
    start = source.tell()
    try:
        return source.read(size) or b""
    finally:
        source.seek(start)


def is_workbook(source: BinaryIO) -> bool:
    head = _read_head(source)
    return any(head.startswith(sig) for sig in _WORKBOOK_MAGIC)


def read_rows(source: BinaryIO) -> List[Row]:
    """
    First sheet of a workbook (or a CSV) as a list of header → value dicts.

    The format comes from the bytes, not from the declared content type:
    browsers often label .csv uploads as application/vnd.ms-excel.

    - Headers come from the first row
    - Fully empty rows are dropped
    - Empty cells become None
    """
    if is_workbook(source):
        excel = pd.ExcelFile(source)
        df = excel.parse(excel.sheet_names[0])
    else:
        df = pd.read_csv(source)

    df = df.dropna(how="all")
    df.columns = [str(c).strip() for c in df.columns]

    df = df.astype(object).where(pd.notna(df), None)
    return df.to_dict(orient="records")
