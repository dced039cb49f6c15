"""Melee action state constants shared by the classifier and techniques."""


class ActionState:
    """Melee action state ids (common to every character)."""

    DEAD_DOWN = 0
    WAIT = 14  # Standing
    WALK_SLOW = 15
    DASH = 20
    RUN = 21
    TURN = 18
    KNEE_BEND = 24  # Jump squat
    JUMP_F = 25
    JUMP_B = 26
    JUMP_AERIAL_F = 27  # Double jump
    JUMP_AERIAL_B = 28
    FALL = 29
    FALL_F = 30
    FALL_B = 31
    FALL_AERIAL = 32
    FALL_AERIAL_F = 33
    FALL_AERIAL_B = 34
    FALL_SPECIAL = 35  # Helpless
    SQUAT = 39
    SQUAT_WAIT = 40
    SQUAT_RV = 41
    LANDING = 42
    LANDING_FALL_SPECIAL = 43  # Also the landing of an air dodge

    # Ground attacks
    ATTACK_11 = 44  # Jab 1
    ATTACK_12 = 45
    ATTACK_13 = 46
    ATTACK_100_START = 47  # Rapid jab
    ATTACK_100_LOOP = 48
    ATTACK_100_END = 49
    ATTACK_DASH = 50
    ATTACK_S_3_HI = 51  # Forward tilt (five angles)
    ATTACK_S_3_LW = 55
    ATTACK_HI_3 = 56
    ATTACK_LW_3 = 57
    ATTACK_S_4_HI = 58  # Forward smash (five angles)
    ATTACK_S_4_LW = 62
    ATTACK_HI_4 = 63
    ATTACK_LW_4 = 64

    # Aerials
    ATTACK_AIR_N = 65
    ATTACK_AIR_F = 66
    ATTACK_AIR_B = 67
    ATTACK_AIR_HI = 68
    ATTACK_AIR_LW = 69
    LANDING_AIR_N = 70
    LANDING_AIR_LW = 74

    # Damage
    DAMAGE_HI_1 = 75
    DAMAGE_FLY_ROLL = 91

    # Shield
    GUARD_ON = 178
    GUARD = 179
    GUARD_OFF = 180
    GUARD_SET_OFF = 181  # Shield stun
    GUARD_REFLECT = 182

    # Techs
    DOWN_BOUND_U = 183  # Missed tech, face up
    DOWN_BOUND_D = 191  # Missed tech, face down
    PASSIVE = 199  # Tech in place
    PASSIVE_STAND_F = 200  # Tech roll
    PASSIVE_STAND_B = 201
    PASSIVE_WALL = 202
    PASSIVE_WALL_JUMP = 203
    PASSIVE_CEIL = 204

    # Grabs and throws
    CATCH = 212
    CATCH_DASH = 214
    THROW_F = 219
    THROW_B = 220
    THROW_HI = 221
    THROW_LW = 222

    # Dodges
    ESCAPE_F = 233  # Roll forward
    ESCAPE_B = 234  # Roll backward
    ESCAPE = 235  # Spot dodge
    ESCAPE_AIR = 236  # Air dodge

    # Ledge
    CLIFF_CATCH = 252
    CLIFF_WAIT = 253
    CLIFF_CLIMB_QUICK = 254
    CLIFF_CLIMB_SLOW = 255
    CLIFF_ATTACK_QUICK = 256
    CLIFF_ATTACK_SLOW = 257
    CLIFF_ESCAPE_QUICK = 258
    CLIFF_ESCAPE_SLOW = 259
    CLIFF_JUMP_QUICK_1 = 260
    CLIFF_JUMP_SLOW_2 = 263

    # First character-specific action state id
    SPECIAL_START = 341


# States an air dodge can land into
AIRDODGE_LANDING_STATES = frozenset({
    ActionState.LANDING_FALL_SPECIAL,
    ActionState.LANDING,
    ActionState.WAIT,
})

FALL_STATES = frozenset(range(ActionState.FALL, ActionState.FALL_AERIAL_B + 1))

DOUBLE_JUMP_STATES = frozenset({ActionState.JUMP_AERIAL_F, ActionState.JUMP_AERIAL_B})

AERIAL_LANDING_STATES = frozenset(
    range(ActionState.LANDING_AIR_N, ActionState.LANDING_AIR_LW + 1)
)

LEDGE_HANG_STATES = frozenset({ActionState.CLIFF_CATCH, ActionState.CLIFF_WAIT})
