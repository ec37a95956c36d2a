"""
Configuration constants for imgsorter.
"""
from pathlib import Path

# --- File Type Definitions ---
# Extensions are stored lowercase and without the leading dot
IMAGE_EXTS = {'jpg', 'jpeg', 'png', 'tiff', 'heic', 'heif', 'webp',
              # partially supported
              'crw', 'nef', 'nrw'}
VIDEO_EXTS = {'avif', 'mp4', 'mov', '3gp', 'avi'}
AUDIO_EXTS = {'amr', 'ogg', 'm4a'}

# Keys of the [custom.extensions] table
IMAGE = 'image'
VIDEO = 'video'
AUDIO = 'audio'
CUSTOM_EXTENSION_CATEGORIES = (IMAGE, VIDEO, AUDIO)

# --- Metadata Parsing ---
# Checked in order, DateTimeOriginal is when the shutter was clicked
DATE_TAGS = [
    'EXIF DateTimeOriginal',
    'Image DateTime',
]
MAKE_TAG = 'Image Make'
MODEL_TAG = 'Image Model'

# MediaInfo "General" track fields, in order of preference
VIDEO_DATE_FIELDS = ["recorded_date", "encoded_date", "tagged_date"]
VIDEO_MODEL_FIELDS = ["device_model", "comapplequicktimemodel"]
VIDEO_MAKE_FIELDS = ["device_manufacturer", "comapplequicktimemake"]

# --- Organization ---
DATE_DIR_FORMAT = "%Y.%m.%d"
# Length of a date dir name such as 2016.12.29
DATE_DIR_LEN = 10
NO_DATE_STR = "no date"
UNKNOWN_DEVICE_DIR_NAME = "Unknown"
DEFAULT_TARGET_SUBDIR = "imgsorted"
DEFAULT_ONEOFFS_DIR_NAME = "Miscellaneous"

# --- Defaults for settings missing from the config file ---
DEFAULT_CONFIG_FILE = Path("imgsorter.toml")
DEFAULT_MIN_FILES_PER_DIR = 1
DEFAULT_COMPACTING_THRESHOLD = 0
DEFAULT_MAX_THREADS = 1
DEFAULT_SOURCE_RECURSIVE = True
DEFAULT_ALWAYS_CREATE_DEVICE_SUBDIRS = False
DEFAULT_INCLUDE_DEVICE_MAKE = True
DEFAULT_ALIGN_OUTPUT = True
DEFAULT_COPY_NOT_MOVE = True
DEFAULT_DRY_RUN = True
DEFAULT_SILENT = False
DEFAULT_VERBOSE = False
