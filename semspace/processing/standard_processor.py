# semspace/processing/standard_processor.py
from semspace.processing.base import BaseDocumentProcessor


class StandardDocumentProcessor(BaseDocumentProcessor):
    def process_documents(self, documents) -> int:
        timer_label = "Sequential Document Processing"
        count = 0
        with self.profiler.timer(timer_label):
            for document in documents:
                self.space.process_document(document)
                count += 1
        return count
