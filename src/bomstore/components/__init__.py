"""BOM reader components: blocks, header, tree, records and paths."""
