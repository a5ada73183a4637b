"""Main facade for the yojimbo_import library."""
