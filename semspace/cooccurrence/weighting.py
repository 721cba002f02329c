# semspace/cooccurrence/weighting.py


class LinearWeighting:
    """Ramped weight: the adjacent word gets window_size, the farthest gets 1."""
    name = 'linear'

    def weight(self, distance: int, window_size: int) -> float:
        return float(window_size - abs(distance) + 1)

    def __repr__(self):
        return "LinearWeighting()"


class UniformWeighting:
    name = 'uniform'

    def weight(self, distance: int, window_size: int) -> float:
        return 1.0

    def __repr__(self):
        return "UniformWeighting()"


WEIGHTING_CLASSES = {
    'linear': LinearWeighting,
    'uniform': UniformWeighting
}


def get_weighting(name):
    """Returns a weighting instance by name. Instances are passed through unchanged."""
    if hasattr(name, 'weight'):
        return name
    try:
        return WEIGHTING_CLASSES[name]()
    except KeyError:
        from semspace.exceptions import ConfigurationError
        raise ConfigurationError(
            f"Unknown weighting function: {name}. Expected one of {sorted(WEIGHTING_CLASSES)}"
        ) from None
