"""
GlideType Resources Module

Multi-path lookup for layout and dictionary files.
"""
from .loader import ResourceLoader, default_search_paths, user_data_dir

__all__ = [
    'ResourceLoader',
    'default_search_paths',
    'user_data_dir',
]
