import warp as wp

@wp.struct
class GridModel:
    width: int
    height: int
    texel_size: wp.vec2
