__all__ = ['xgcd', 'mulinv', 'modsqrt']


def xgcd(b, n):
    """Takes positive integers a, b as input, and return a triple (g, x, y), such that ax + by = g = gcd(a, b)"""
    x0, x1, y0, y1 = 1, 0, 0, 1
    while n != 0:
        q, b, n = b // n, n, b % n
        x0, x1 = x1, x0 - q * x1
        y0, y1 = y1, y0 - q * y1
    return b, x0, y0


def mulinv(b, n):
    """An application of extended GCD algorithm to finding modular inverses"""
    g, x, _ = xgcd(b, n)
    assert g == 1, 'Numbers must be coprimes'
    return x % n


def modsqrt(a, p):
    """Square root of a modulo a prime p with p = 3 (mod 4), which holds for secp256k1"""
    assert p % 4 == 3, 'Only primes congruent to 3 mod 4 are supported'
    root = pow(a, (p + 1) // 4, p)
    assert pow(root, 2, p) == a % p, f'{a} is not a quadratic residue'
    return root
