from rich.pretty import pprint

from protopt import *

__prog__ = "demo"

options = OptionSet(shell=True)
defines = {}


@options.add("v|verbose", descr="print more details")
def verbose(value):
    pass


@options.add("n|count=", descr="repeat {N} times", type=int)
def count(value):
    pass


@options.add_pair("D=", descr="define {0:NAME} as {1:VALUE}")
def define(name, value):
    defines[name] = value


if __name__ == '__main__':
    pprint(options.parse())
    pprint(defines)
    pprint(define)
    options.print_help()
