from rich.pretty import pprint

from optbind import *

options = (
    Option("-v", "--verbose", slot=Int(counter=True), descr="Increase verbosity"),
    Option("-n", "--number", slot=Int(), required=True, descr="How many items to process"),
    Option("-m", "--mode", slot=String(), choices=("fast", "slow"), default="fast", descr="Processing mode"),
    Option("-i", "--input", slot=ResourceList(), descr="Files to read"),
)


if __name__ == '__main__':
    pprint(invoke("main.py", options, descr="optbind demo"))
