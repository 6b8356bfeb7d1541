#!/usr/bin/python3
# -*- coding: UTF-8 -*-
# utility.py - Helper functions

def userChoice(options, formatter=str, prompt="Your selection: "):
    print(" -=-= Choose One =-=- ")
    for i in range(len(options)):
        print("[{}] : {}".format(i+1, formatter(options[i])))
    while True:
        raw = input(prompt)
        try:
            j = int(raw)
        except ValueError:
            print("Sorry: '{}' is not a number.".format(raw.strip()))
            continue
        if 1 <= j <= len(options):
            break
        print("Sorry: pick a number from 1 to {}.".format(len(options)))
    # The user's choice is 1-N but options[] is zero-indexed.
    return options[j-1]
