"""HTTP surface for the Orpheus backend."""
