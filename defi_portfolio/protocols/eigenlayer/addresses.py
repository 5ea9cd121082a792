"""EigenLayer core contracts and LST strategies (mainnet)."""
from dataclasses import dataclass


@dataclass(frozen=True)
class Strategy:
    address: str
    underlying_token: str
    symbol: str

    @property
    def name(self) -> str:
        return f"{self.symbol} Strategy"


STRATEGY_MANAGER = "0x858646372CC42E1A627fcE94aa7A7033e7CF075A"
DELEGATION_MANAGER = "0x39053D51B77DC0d36036Fc1fCc8Cb819df8Ef37A"

STRATEGIES: tuple[Strategy, ...] = (
    Strategy("0x93c4b944D05dfe6df7645A86cd2206016c51564D", "0xae7ab96520DE3A18E5e111B5EaAb095312D7fE84", "stETH"),
    Strategy("0x1BeE69b7dFFfA4E2d53C2a2Df135C388AD25dCD2", "0xae78736Cd615f374D3085123A210448E74Fc6393", "rETH"),
    Strategy("0x54945180dB7943c0ed0FEE7EdaB2Bd24620256bc", "0xBe9895146f7AF43049ca1c1AE358B0541Ea49704", "cbETH"),
    Strategy("0x57ba429517c3473B6d34CA9aCd56c0e735b94c02", "0xf1C9acDc66974dFB6dEcB12aA385b9cD01190E38", "osETH"),
    Strategy("0x0Fe4F44beE93503346A3Ac9EE5A26b130a5796d6", "0xf951E335afb289353dc249e82926178EaC7DEd78", "swETH"),
    Strategy("0x13760F50a9d7377e4F20CB8CF9e4c26586c658ff", "0xE95A203B1a91a908F9B9CE46459d101078c2c3cb", "ankrETH"),
    Strategy("0xa4C637e0F704745D182e4D38cAb7E7485321d059", "0x856c4Efb76C1D1AE02e20CEB03A2A6a08b0b8dC3", "oETH"),
    Strategy("0x7CA911E83dabf90C90dD3De5411a10F1A6112184", "0xa2E3356610840701BDf5611a53974510Ae27E2e1", "wBETH"),
    Strategy("0x8CA7A5d6f3acd3A7A8bC468a8CD0FB14B6BD28b6", "0xac3E018457B222d93114458476f3E3416Abbe38F", "sfrxETH"),
    Strategy("0xAe60d8180437b5C34bB956822ac2710972584473", "0x8c1BEd5b9a0928467c9B1341Da1D7BD5e10b6549", "lsETH"),
    Strategy("0x298aFB19A105D59E74658C4C334Ff360BadE6dd2", "0xd5F7838F5C461fefF7FE49ea5ebaF7728bB0ADfa", "mETH"),
)

STRATEGY_MANAGER_ABI = [
    {
        "inputs": [
            {"name": "staker", "type": "address"},
            {"name": "strategy", "type": "address"},
        ],
        "name": "stakerStrategyShares",
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    }
]

STRATEGY_ABI = [
    {
        "inputs": [{"name": "amountShares", "type": "uint256"}],
        "name": "sharesToUnderlyingView",
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    }
]

DELEGATION_MANAGER_ABI = [
    {
        "inputs": [{"name": "staker", "type": "address"}],
        "name": "isDelegated",
        "outputs": [{"name": "", "type": "bool"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [{"name": "staker", "type": "address"}],
        "name": "delegatedTo",
        "outputs": [{"name": "", "type": "address"}],
        "stateMutability": "view",
        "type": "function",
    },
]
