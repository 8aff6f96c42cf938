"""Pure domain helpers: clock abstraction and decimal values."""
