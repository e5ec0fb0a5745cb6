class HeritageSitesError(Exception):
    """Base class for pipeline faults."""


class LoadError(HeritageSitesError):
    """
    Exception raised when an input source is missing, unreadable or malformed.

    Parameters
    ----------
    message : str
        Explanation of the error.
    path : str, default None
        Input file which caused the error.
    """

    def __init__(self, message, path=None):
        self.path = path
        super().__init__(f"{path} - {message}" if path is not None else message)


class GeometryError(HeritageSitesError):
    """
    Exception raised when a clip region does not intersect a raster.

    Parameters
    ----------
    message : str
        Explanation of the error.
    path : str, default None
        Raster which the region was clipped against.
    """

    def __init__(self, message, path=None):
        self.path = path
        super().__init__(f"{path} - {message}" if path is not None else message)


class DataQualityError(HeritageSitesError):
    """
    Exception raised when a site carries a missing or non-numeric area.

    Parameters
    ----------
    message : str
        Explanation of the error.
    site_ids : list of int, default None
        Identifiers of the offending sites.
    """

    def __init__(self, message, site_ids=None):
        self.site_ids = list(site_ids) if site_ids is not None else []
        if self.site_ids:
            message = f"{message} (site_id: {', '.join(str(i) for i in self.site_ids)})"
        super().__init__(message)
