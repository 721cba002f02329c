# semspace/space/factory.py
from semspace.constants import COALS_WINDOW_SIZE, HAL_WINDOW_SIZE
from semspace.exceptions import ConfigurationError
from semspace.performance_monitoring import Profiler


class SpaceFactory:

    SPACE_CLASSES = {
        "coals": "coals.CoalsSpace",          # Windowed co-occurrence with correlation scaling
        "hal": "hal.HalSpace",                # Directional window, [row | column] vectors
        "lsa": "lsa.TermDocumentSpace"        # Term x document counts
    }
    STATISTICS_MODELS = ("coals", "lsa")

    @staticmethod
    def _space_class(model):
        module_name, class_name = SpaceFactory.SPACE_CLASSES[model].rsplit(".", 1)
        module = __import__(f"semspace.space.{module_name}", fromlist=[class_name])
        return getattr(module, class_name)

    @staticmethod
    def _space_arguments(model, config):
        common = {
            'reduced_dimensions': config.get('reduced_dimensions') or 0,
            'svd_solver': config.get('svd_solver', 'auto'),
            'scale_by_singular_values': bool(config.get('scale_by_singular_values', False))
        }
        transform = config.get('transform')

        if model == 'coals':
            return {
                **common,
                'window_size': config.get('window_size') or COALS_WINDOW_SIZE,
                'weighting': config.get('weighting', 'linear'),
                'max_words': config.get('max_words', 0) or 0,
                'max_dimensions': config.get('max_dimensions', 0) or 0,
                'transform': transform or 'correlation'
            }
        if model == 'hal':
            return {
                **common,
                'window_size': config.get('window_size') or HAL_WINDOW_SIZE,
                'weighting': config.get('weighting', 'linear'),
                'column_threshold': config.get('column_threshold'),
                'retain_columns': config.get('retain_columns', 0) or 0,
                'transform': transform or 'none'
            }
        return {**common, 'transform': transform or 'tflogidf'}

    @staticmethod
    def create_space(config, tokenizer=None, compounds=None, profiler=None):
        """
        Create the semantic space described by config.

        Args:
            config (dict): Configuration, see utils.DEFAULT_CONFIG
            tokenizer (OrderPreservingTokenizer, optional): Token feed for documents
            compounds (CompoundRecognizer, optional): Registered compounds
            profiler (Profiler, optional): Performance profiler for timing operations

        Returns:
            BaseSemanticSpace: The configured space
        """
        if profiler is None:
            profiler = Profiler()

        model = config.get('model', 'coals')
        if model not in SpaceFactory.SPACE_CLASSES:
            raise ConfigurationError(
                f"Unknown model: {model}. Expected one of {sorted(SpaceFactory.SPACE_CLASSES)}"
            )

        if config.get('load_statistics'):
            if model not in SpaceFactory.STATISTICS_MODELS:
                raise ConfigurationError(
                    f"Loading statistics is only supported for {' and '.join(SpaceFactory.STATISTICS_MODELS)}"
                )
            space_class = SpaceFactory._space_class(model)
            profiler.log_message(f"Loading statistics from {config['statistics_file']}")
            return space_class.load_statistics(config['statistics_file'], tokenizer, compounds, profiler)

        space_class = SpaceFactory._space_class(model)
        space = space_class(
            tokenizer=tokenizer, compounds=compounds, profiler=profiler,
            **SpaceFactory._space_arguments(model, config)
        )
        profiler.log_message(f"Created semantic space: {space_class.__name__} ({space.space_name()})")
        return space
