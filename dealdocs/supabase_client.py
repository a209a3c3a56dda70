"""
Supabase Client

Shared Supabase client plus the storage helpers used for PDF templates.
Files are stored privately; callers download bytes directly.
"""

import logging

from supabase import create_client, Client

from config import Config

logger = logging.getLogger(__name__)

# Supabase client singleton
_supabase_client: Client = None


def get_supabase_client() -> Client:
    """
    Get or create the Supabase client.
    Uses SUPABASE_URL and SUPABASE_KEY from config.
    """
    global _supabase_client

    if _supabase_client is None:
        if not Config.SUPABASE_URL or not Config.SUPABASE_KEY:
            raise ValueError(
                "SUPABASE_URL and SUPABASE_KEY environment variables are required. "
                "Get these from your Supabase project settings."
            )

        _supabase_client = create_client(Config.SUPABASE_URL, Config.SUPABASE_KEY)

    return _supabase_client


def set_supabase_client(client) -> None:
    """Replace the shared client (used by tests and scripts)."""
    global _supabase_client
    _supabase_client = client


def upload_file(bucket: str, storage_path: str, file_data: bytes, content_type: str = None) -> dict:
    """
    Upload a file to a Supabase Storage bucket, replacing any existing file.

    Args:
        bucket: Target bucket name
        storage_path: Path within the bucket
        file_data: The file content as bytes
        content_type: MIME type of the file (optional)

    Returns:
        dict with 'path', 'filename', 'size' keys on success
    """
    client = get_supabase_client()

    file_options = {'upsert': 'true'}
    if content_type:
        file_options['content-type'] = content_type

    client.storage.from_(bucket).upload(
        path=storage_path,
        file=file_data,
        file_options=file_options
    )

    return {
        'path': storage_path,
        'filename': storage_path.rsplit('/', 1)[-1],
        'size': len(file_data)
    }


def download_file(bucket: str, storage_path: str) -> bytes:
    """Download a file's bytes from a Supabase Storage bucket."""
    client = get_supabase_client()
    return client.storage.from_(bucket).download(storage_path)


def delete_file(bucket: str, storage_path: str) -> bool:
    """
    Delete a file from Supabase Storage.

    Returns:
        True on success, False on failure
    """
    client = get_supabase_client()

    try:
        client.storage.from_(bucket).remove([storage_path])
        return True
    except Exception as e:
        logger.error(f"Failed to delete file {storage_path}: {e}")
        return False
