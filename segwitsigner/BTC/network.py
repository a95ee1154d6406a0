import os
from enum import Enum, unique


@unique
class NETWORK(Enum):
    MAIN = 'main'
    TEST = 'test'


def current_network():
    return NETWORK(os.environ.get('SEGWITSIGNER_NETWORK', 'main'))


main = {
    'hrp': 'bc',
    'wif': b'\x80',
}

test = {
    'hrp': 'tb',
    'wif': b'\xef',
}

networks = {
    NETWORK.MAIN: main,
    NETWORK.TEST: test
}


def network(attr, _network=None):
    net = networks[_network or current_network()]
    return net[attr]


def network_from_wif_prefix(prefix: bytes) -> NETWORK:
    for net, params in networks.items():
        if params['wif'] == prefix:
            return net
    raise ValueError(f'Unknown WIF prefix: 0x{prefix.hex()}')
