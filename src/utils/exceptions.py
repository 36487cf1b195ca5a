class BikeHotspotException(Exception):
    """Base Exception Class"""
    pass


class LoadFailure(BikeHotspotException):
    """Error for when one of the two datasets cannot be loaded

    Attributes:
    dataset (str): Which dataset failed, 'accidents' or 'lanes'
    reason (str): What went wrong
    """
    dataset = 'unknown'

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f'Failed to load {self.dataset} dataset : {reason}')


class AccidentsLoadError(LoadFailure):
    """The accidents GeoJSON is missing or invalid"""
    dataset = 'accidents'


class LaneNetworkLoadError(LoadFailure):
    """The bike lane network GeoJSON is missing or invalid"""
    dataset = 'lanes'


class DatasetNotLoadedError(BikeHotspotException):
    """Queried the explorer before both datasets were loaded"""
    pass


class UnknownFieldError(BikeHotspotException, ValueError):
    """Field name is not one of the four categorical fields"""
    pass


class ConfigError(BikeHotspotException):
    """Config Error"""
    pass
