import re
import time
import uuid
from pathlib import PurePosixPath

_SAFE_EXT = re.compile(r"^\.[a-z0-9]{1,16}$")


def safe_extension(original_name: str | None) -> str:
    """
    Extension of a client-supplied filename, lower-cased, with the dot.
    Anything that is not a short alphanumeric suffix becomes "".
    """
    if not original_name:
        return ""
    # Windows clients may send backslash paths
    name = PurePosixPath(original_name.replace("\\", "/")).name
    ext = PurePosixPath(name).suffix.lower()
    return ext if _SAFE_EXT.match(ext) else ""


def generate_storage_id(original_name: str | None) -> str:
    """
    <uuid4>-<nanosecond timestamp><ext>

    Random token keeps concurrent calls collision-free without shared state.
    """
    return f"{uuid.uuid4()}-{time.time_ns()}{safe_extension(original_name)}"
