from easel.db.models.uploaded_file import MigrationStatus, UploadedFile

__all__ = ["MigrationStatus", "UploadedFile"]
