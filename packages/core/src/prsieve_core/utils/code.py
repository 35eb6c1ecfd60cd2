BINARY_EXTENSIONS = {
    ".png",
    ".jpg",
    ".jpeg",
    ".gif",
    ".svg",
    ".ico",
    ".webp",
    ".bmp",
    ".tif",
    ".tiff",
    ".psd",
    ".pdf",
    ".doc",
    ".docx",
    ".xls",
    ".xlsx",
    ".ppt",
    ".pptx",
    ".woff",
    ".woff2",
    ".ttf",
    ".eot",
    ".otf",
    ".mp4",
    ".mov",
    ".avi",
    ".mp3",
    ".wav",
    ".ogg",
    ".flac",
    ".zip",
    ".tar",
    ".gz",
    ".tgz",
    ".bz2",
    ".xz",
    ".rar",
    ".7z",
    ".jar",
    ".war",
    ".class",
    ".exe",
    ".dll",
    ".so",
    ".dylib",
    ".o",
    ".a",
    ".lib",
    ".bin",
    ".dat",
    ".pyc",
    ".pyd",
    ".wasm",
    ".nupkg",
    ".sqlite",
    ".db",
}


def get_file_extension(file_name: str) -> str:
    """Return the extension including the dot (".ts"), or "" when there is none."""
    base_name = file_name.rsplit("/", 1)[-1]
    idx = base_name.rfind(".")
    return base_name[idx:] if idx >= 0 else ""


def is_binary_file(file_name: str) -> bool:
    return get_file_extension(file_name).lower() in BINARY_EXTENSIONS
