"""HTTP surface for RawGraph panels."""
