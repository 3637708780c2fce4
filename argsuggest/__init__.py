"""argsuggest - generator scheduling for shell autocompletion.

Decides, keystroke after keystroke, which suggestion generators of the
argument being typed must run again, runs them on the asyncio loop and
merges their results, dropping the ones that arrive too late.
"""
