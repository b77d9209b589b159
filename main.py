from rich.pretty import pprint

from herald import *


class Greeter:
    def __init__(self, host):
        self.host = host

    @command("hello", "greetings", description="say hello")
    def hello(self, actor=ACTOR, loud=Flag("-l", "--loud"), name=Positional(optional=True)):
        greeting = f"Hello, {name or 'World'}!"
        self.host.send_line(actor, greeting.upper() if loud else greeting)

    @command(description="repeat the arguments")
    def say(self, actor=ACTOR, words=Rest()):
        self.host.send_line(actor, " ".join(words))


if __name__ == '__main__':
    host = ConsoleHost(permissions={"*"})
    dispatcher = Dispatcher(Greeter(host), host=host)
    executor = Executor(dispatcher)

    pprint(dispatcher.registry)
    executor.on_command("operator", "hello", "--loud herald")
    executor.on_command("operator", "say", "usage lines follow")
    executor.on_command("operator", "hello", "-x")
    pprint(executor.on_complete("operator", "hello", "-"))
