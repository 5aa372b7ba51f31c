"""Format readers. Importing a module registers its reader."""
