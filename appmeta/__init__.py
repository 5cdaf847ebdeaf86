"""
appmeta - metadata descriptors for Android application backups.

Defines the record describing one backup of one installed application:
- Capture flags packed into a bitset
- The descriptor model and its versioned JSON wire format
- Checksum computation and verification for restore
- Package and user scoped storage of descriptor files
"""

__version__ = "0.1.0"
__author__ = "appmeta Contributors"
