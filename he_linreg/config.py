from dataclasses import dataclass

# every circuit is specialised to vectors of this width
VEC_SIZE = 5

# CKKS scale, also the size of every intermediate prime
SCALE_BITS = 50
# first and last primes of the coefficient modulus chain
OUTER_BITS = 60
# intermediate primes kept after the deepest circuit, the final level is
# OUTER_BITS + SPARE_LEVELS * SCALE_BITS wide
SPARE_LEVELS = 1
# bits left for the integer part of any value once a circuit is done
HEADROOM_BITS = OUTER_BITS + SPARE_LEVELS * SCALE_BITS - SCALE_BITS - 1

# rational predict carries numerators of degree 5 in the inputs and the
# vector sums add a few bits on top, |x| < 2**10 keeps them under 2**56
INTEGER_BITS = 10

POLY_MODULUS_DEGREES = (8192, 16384, 32768)
# largest coefficient modulus allowed for 128-bit security
MAX_COEFF_MODULUS_BITS = {
    8192: 218,
    16384: 438,
    32768: 881,
}

# public contexts a runtime keeps deserialized, least recently used first out
CONTEXT_CACHE_SIZE = 8

# decrypted magnitudes below this cannot be told apart from CKKS noise
NOISE_FLOOR = 2.0 ** -30


@dataclass(frozen=True)
class EncryptionParameters:
    poly_modulus_degree: int
    coeff_mod_bit_sizes: tuple
    scale_bits: int = SCALE_BITS
    spare_levels: int = SPARE_LEVELS

    @property
    def global_scale(self):
        return 2 ** self.scale_bits

    @property
    def depth(self):
        return len(self.coeff_mod_bit_sizes) - 2 - self.spare_levels


def select_parameters(depth):
    """Smallest CKKS parameter set able to evaluate `depth` multiplications."""
    coeff_mod_bit_sizes = (
        (OUTER_BITS,) + (SCALE_BITS,) * (depth + SPARE_LEVELS) + (OUTER_BITS,)
    )
    total_bits = sum(coeff_mod_bit_sizes)
    for poly_modulus_degree in POLY_MODULUS_DEGREES:
        if total_bits <= MAX_COEFF_MODULUS_BITS[poly_modulus_degree]:
            return EncryptionParameters(poly_modulus_degree, coeff_mod_bit_sizes)
    return None
