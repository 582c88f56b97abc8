"""Service layer: table store, decoder, assembler and mutation handlers."""
