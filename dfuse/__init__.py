"""DfuSe firmware images, memory mappings and S-record / Intel HEX files."""

__version__ = "0.1.0"
__all__ = ["errors", "mapping", "elements", "srecord", "intelhex", "image"]