__version__ = "0.1.0"

# --- Event Model ---
from .classes.event_objects import (
    Event,
    Actor,
    Step,
    StepData,
    DataType,
    WaitFor,
    StepRef,
    find_event,
)

# --- Codec ---
from .parsers.zev_reader import ZevReader, parse_zev, load_zev
from .parsers.zev_writer import ZevWriter, write_zev, save_zev
from .parsers.layout import ZevLayout

# --- Exports ---
from .export.event_export import event_summary, event_to_json, event_to_dot

# --- Errors ---
from .misc.validation import (
    ZevError,
    ZevParseError,
    InvalidHeaderError,
    InvalidFileError,
    ZevWriteError,
    LogicError,
    MutationError,
    StringNotAsciiError,
    StringTooLongError,
    StringSizeWrongError,
    OutOfRangeError,
)

from .misc.logger import create_logger
_logger = create_logger(verbose=False, name="pyzev")
_logger.info(f"pyzev {__version__} loaded.")
