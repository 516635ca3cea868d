"""HTTP surface of the page builder."""
