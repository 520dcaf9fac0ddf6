"""Machine core: memory, registers, decoder, instruction set and cycle driver."""
