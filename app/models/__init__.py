from app.models.dataset_entry import DatasetEntry

__all__ = ["DatasetEntry"]
