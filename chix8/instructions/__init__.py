"""CHIP-8 instruction handlers, one module per instruction family."""
