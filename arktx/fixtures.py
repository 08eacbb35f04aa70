from __future__ import annotations
from typing import Callable


class Network(object):

    def __init__(self,
        name: str,
        pub_key_hash: int,
        milestones: dict[str, int]
    ):
        self.name = name
        self.pub_key_hash = pub_key_hash
        self.milestones = milestones

    def is_active(self, flag: str, height: int) -> bool:
        activation = self.milestones.get(flag)
        return activation is not None and height >= activation

    def features(self, height: int) -> Callable[[str], bool]:
        """
        Feature-flag predicate for the rules in force at `height`.
        """
        return lambda flag: self.is_active(flag, height)


# DEVNET is the public test network the seeds below belong to.
# aip11 enables every transaction kind after the legacy four.

DEVNET = Network('devnet', pub_key_hash=30, milestones={'aip11': 1})

MAINNET = Network('mainnet', pub_key_hash=23, milestones={'aip11': 11_273_000})

NETWORKS = {n.name: n for n in (DEVNET, MAINNET)}


SEEDS = [
    '167.114.29.33',
    '167.114.29.34',
    '167.114.29.35',
    '167.114.29.36',
    '167.114.29.37',
    '167.114.29.38',
    '167.114.29.39',
    '167.114.29.40',
    '167.114.29.41',
    '167.114.29.42',
    '167.114.29.43',
    '167.114.29.44',
    '167.114.29.45',
    '167.114.29.46',
    '167.114.29.47',
    '167.114.29.48',
]


class FixtureWallet(object):

    def __init__(self, passphrase: str, address: str, public_key: str):
        self.passphrase = passphrase
        self.address = address
        self.public_key = public_key


# WALLETS are funded devnet wallets used as random senders and recipients.
# Wallets whose second passphrase is unknown are left out.

WALLETS = [
    FixtureWallet(
        '2.6-wallet1', 'DHKxXag9PjfjHBbPg3HQS5WCaQZdgDf6yi',
        '02ca35b12058437774b47b0fde00a80c680855403330ce41bdefef6e504661f7ed'
    ),
    FixtureWallet(
        '2.6-wallet2', 'DBzGiUk8UVjB2dKCfGRixknB7Ki3Zhqthp',
        '022668b4d0135cf1d221f1bdf8b6a3a3027bb6adedce32a737553291481e64e490'
    ),
    FixtureWallet(
        '2.6-wallet5', 'DQhzMRvVoCYCiZH2iSyuqCTcayz7z4XTKx',
        '03a23637f079abde0deb5860daa4d26717855af14c6dded8bc401bda4465f4b747'
    ),
    FixtureWallet(
        '2.6-wallet6', 'DMSD6fFT1Xcxh4ErYExr5MtGnEuDcYu22m',
        '0223b47710716023b45d37a2e45d6cafcabcb0541f4c9d57f946f1fa5630c2d026'
    ),
    FixtureWallet(
        '2.6-wallet10', 'DEHyKHdtzHqTghfpwaBcvTzLpgPP5AAUgE',
        '02e7e9b33d19e5aa7ad092e8cdb5c973b44e2c761840c64a1abbe5571bb317d464'
    ),
    FixtureWallet(
        '2.6-wallet11', 'DBgA92a616rwVi9GsgYUwBq9Y7dgvZiC41',
        '028b84f92ec7ec7a019973c9183403304ae9564787b66c242fa899c299617812af'
    ),
    FixtureWallet(
        '2.6-wallet13', 'D6JpPhN7BehrhNy7AbSQ2u9mkSZb1k7Ens',
        '03c2b313282db91aad627c4a52d47bec99eb7c6e637399bb213c8aff652f9b7494'
    ),
    FixtureWallet(
        '2.6-wallet14', 'D9sdJ42YtJpXeL7Fa1cTLiciW7FpGYqms4',
        '03215cb65a51897465c7ee5da007a4506b8451b004749dfe28d4debaa17f6423ea'
    ),
    FixtureWallet(
        '2.6-wallet18', 'DAwN6Pp4ErGf69EypErrbtuWFfEMtuSzmE',
        '02d9bc80a3e40742ba116ebfaeaa7d792ccdfefa3dd24762b3d02a0e3e4e67af6d'
    ),
    FixtureWallet(
        '2.6-wallet19', 'DQ6sE3jE9rTFC13e2ndooRdy5YCYinLbPm',
        '033b93fed9f0f6b84ccb23389d24b564b13d3ad2bb0b9ab7938d4700fb3a80ce03'
    ),
    FixtureWallet(
        '2.6-wallet21', 'D6qzeJEGG7rEBem5bNCCZqHtPCBtzsUZpP',
        '02ecd3dcdd17f36ba7ba0b4ff836b03fff2300f7e324431de39503bf1ef804989a'
    ),
    FixtureWallet(
        '2.6-wallet22', 'DNVhLKTPh4LnqhcnkogNS8iSxmsnFG17tC',
        '02db4da057fe2c0ba1b934fbd4c4415ef54c5dad859cc90fe95e9a875fde8d319f'
    ),
    FixtureWallet(
        '2.6-wallet25', 'D7XtDDKh2VrRtz5rtbBicfgSEoEQzEZiNx',
        '03be3feac3dd670643b5a6ac013f8a3ca37cfc7c8efe3d93dd532c97b6d203300a'
    ),
    FixtureWallet(
        '2.6-wallet26', 'D9gQjhu2tDUstXfrbK85zHi23VtAk72qsS',
        '020c2f9c124dacb9bfd6b9373e35c1c07aab8c6ecd50fa3b2946c79a79a1838687'
    ),
    FixtureWallet(
        '2.6-wallet27', 'DKhfkyY4RZyxR7CFjQAeNtGKXAaVEBa9HK',
        '025921ff2ca02733ee9760ab7ad7b1db628adaee36317db5a0fba9da876c001298'
    ),
    FixtureWallet(
        '2.6-wallet31', 'DDb3EXY3refv2f5ymMME3hp2DXFqMPzGah',
        '021d83e48f132a94dba93b216ae7a2b35965bf02818246393164bfee6c36f3f56b'
    ),
    FixtureWallet(
        '2.6-wallet32', 'D5HydybffvfuwdbBKQ1dnhiXzNnWq6CgQz',
        '03b3a212f8eff66c6bfda38090e75a9a82015438048a758b3a7c6d7dc050551455'
    ),
    FixtureWallet(
        '2.6-wallet33', 'D9DMKvx8fDyWyAP1EUGs5McBwwv3y5E1Yn',
        '02ce5dda5b417698c998af763176a8255b507b48929826074e56e60d30a16a622d'
    ),
]
