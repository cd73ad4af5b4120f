# coding: utf-8


# Gregory-Leibniz series: (4/1) - (4/3) + (4/5) - (4/7) + (4/9) - (4/11) + ...
def estimate(iterations):
    result = 0.0
    sign = 1.0
    denominator = 1.0
    for _ in range(iterations):
        result = result + (sign * 4 / denominator)
        denominator = denominator + 2
        sign = -sign
    return result


def term(i):
    """ Signed i-th term of the series, also an error bound for estimate(i)"""
    if i < 0:
        raise ValueError('term index must be non-negative: {}'.format(i))
    sign = -1.0 if i % 2 else 1.0
    return sign * 4 / (2 * i + 1)
