"""
Core enumerations for emuchip8.

:class:`Instruction` tags every instruction class of the base CHIP-8
set.  The decoder turns a raw opcode word into one of these tags and
the executor maps each tag to exactly one handler.  ``NOP`` is what
every unmapped or reserved opcode decodes to.
"""

from enum import IntEnum


class Instruction(IntEnum):
    NOP = 0
    CLS = 1          # 00E0
    RET = 2          # 00EE
    JP = 3           # 1nnn
    CALL = 4         # 2nnn
    SE_BYTE = 5      # 3xkk
    SNE_BYTE = 6     # 4xkk
    SE_REG = 7       # 5xy0
    LD_BYTE = 8      # 6xkk
    ADD_BYTE = 9     # 7xkk
    LD_REG = 10      # 8xy0
    OR = 11          # 8xy1
    AND = 12         # 8xy2
    XOR = 13         # 8xy3
    ADD_REG = 14     # 8xy4
    SUB = 15         # 8xy5
    SHR = 16         # 8xy6
    SUBN = 17        # 8xy7
    SHL = 18         # 8xyE
    SNE_REG = 19     # 9xy0
    LD_I = 20        # Annn
    JP_V0 = 21       # Bnnn
    RND = 22         # Cxkk
    DRW = 23         # Dxyn
    SKP = 24         # Ex9E
    SKNP = 25        # ExA1
    LD_VX_DT = 26    # Fx07
    LD_VX_K = 27     # Fx0A
    LD_DT_VX = 28    # Fx15
    LD_ST_VX = 29    # Fx18
    ADD_I = 30       # Fx1E
    LD_F = 31        # Fx29
    LD_B = 32        # Fx33
    LD_MEM_VX = 33   # Fx55
    LD_VX_MEM = 34   # Fx65
