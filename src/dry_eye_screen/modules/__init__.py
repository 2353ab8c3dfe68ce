"""
Per-frame analysis modules: landmark geometry, blink debouncing and the
landmark detector adapter.
"""
