"""Constants for Device model field names"""


class DeviceFields:
    """Field name constants for Device model"""
    NAME = "name"
    BRAND = "brand"
    STATE = "state"
    CREATION_TIME = "creation_time"
    VERSION = "version"

    # MongoDB specific
    MONGO_ID = "_id"  # MongoDB's internal _id field
