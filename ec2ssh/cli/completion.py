"""Bash completion for the ec2-ssh command."""

BASH_COMPLETION_SCRIPT = """\
#!/bin/bash

# Bash completion for ec2-ssh
_ec2_ssh_completion() {
    local cur="${COMP_WORDS[COMP_CWORD]}"

    if [[ ${COMP_CWORD} -eq 1 ]]; then
        COMPREPLY=($(compgen -W "connect profiles completion version init" -- "$cur"))
    elif [[ ${COMP_CWORD} -eq 2 && "${COMP_WORDS[1]}" == "connect" ]]; then
        local profiles
        profiles=$(ec2-ssh profiles 2>/dev/null)
        COMPREPLY=($(compgen -W "$profiles" -- "$cur"))
    fi
}

complete -F _ec2_ssh_completion ec2-ssh
"""
