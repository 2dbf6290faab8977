"""
Adapters layer - External integrations (Supabase Directory and Identity).
"""

from .mock_directory import MockDirectory, MockIdentity
from .supabase_directory import SupabaseDirectory
from .supabase_identity import SupabaseIdentity

__all__ = ["MockDirectory", "MockIdentity", "SupabaseDirectory", "SupabaseIdentity"]
