from rich.pretty import pprint

from nestargs import *


@command("copy")
class Copy:
    source = Parameter(0, descr="file to read")
    destination = Parameter(1, descr="file to write")


@command("status")
class Status:
    pass


@command
class Tool:
    verbose = Option("-v", "--verbose", type=bool, descr="print more details")
    jobs = Option("-j", "--jobs", type=int, default=1, descr="number of workers")
    action = CommandGroup(Copy, Status)


if __name__ == '__main__':
    pprint(invoke(Tool))
