class CorrespondenceError(Exception):
    """Base class for errors raised while generating correspondences."""


class ImageLoadError(CorrespondenceError, OSError):
    """Image could not be read or decoded."""


class FeatureExtractionError(CorrespondenceError):
    pass


class MatchError(CorrespondenceError):
    """Descriptor matching failed. Only the matching step is aborted."""


class RenderError(CorrespondenceError):
    pass
