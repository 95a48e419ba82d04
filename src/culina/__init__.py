"""
Culina - AI recipe generation backend.

Quota-gated recipe generation: preferences are merged into a prompt, the
completion gateway writes the recipe, and the result is saved to Supabase.
"""

__version__ = "1.0.0"
