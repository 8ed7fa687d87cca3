"""Per-project palettes of persistent tmux shell sessions."""
