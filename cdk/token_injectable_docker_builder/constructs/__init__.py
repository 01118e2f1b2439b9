"""
Constructs making up the TokenInjectableDockerBuilder
"""
