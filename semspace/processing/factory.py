# semspace/processing/factory.py
from semspace.constants import DEFAULT_PARALLEL_DOC_THRESHOLD


class ProcessorFactory:

    DEFAULT_PARALLEL_DOC_THRESHOLD = DEFAULT_PARALLEL_DOC_THRESHOLD

    PROCESSOR_CLASSES = {
        "parallel": "parallel_processor.ParallelDocumentProcessor",  # Thread pool over documents
        "standard": "standard_processor.StandardDocumentProcessor"   # Single-threaded
    }

    @staticmethod
    def create_processor(space, mode='auto', num_workers=None, parallel_threshold=None,
                         doc_count=None, profiler=None):
        profiler = profiler or space.profiler

        if parallel_threshold is None:
            parallel_threshold = ProcessorFactory.DEFAULT_PARALLEL_DOC_THRESHOLD

        original_mode = mode
        if mode == 'auto':
            if doc_count and doc_count >= parallel_threshold:
                mode = 'parallel'
            else:
                mode = 'standard'
            profiler.log_message(f"Auto-selected processing mode: {mode} "
                                 f"(doc_count={doc_count}, threshold={parallel_threshold})")
        elif mode not in ProcessorFactory.PROCESSOR_CLASSES:
            profiler.log_message(f"Warning: Unknown processing mode '{mode}'. Using standard processor.")
            mode = 'standard'

        if original_mode != 'auto':
            profiler.log_message(f"Using explicitly requested processing mode: {mode}")

        selected_class = ProcessorFactory.PROCESSOR_CLASSES[mode]
        module_name, class_name = selected_class.rsplit(".", 1)
        module = __import__(f"semspace.processing.{module_name}", fromlist=[class_name])
        processor_class = getattr(module, class_name)

        profiler.log_message(f"Created document processor: {module_name}.{class_name}")
        if mode == 'parallel':
            return processor_class(space, profiler, num_workers)
        return processor_class(space, profiler)
