# operational constants
EXIT_SUCCESS = 0
EXIT_FAILURE = 1

# tree constants
# NOTE: a branching factor below 3 cannot keep both halves
# of a split above the underflow threshold
MIN_BRANCHING_FACTOR = 3
DEFAULT_BRANCHING_FACTOR = 128

# stress suite
STRESS_BRANCHING_FACTOR = 4
STRESS_NUM_PERMS = 1
STRESS_PERM_STEP = 10

PROMPT = "bptree > "

USAGE = '''
Supported meta-commands:
------------------------
print usage
.help

quit REPl
> .quit

print tree <tree-name>
> .btree <tree-name>

performs internal consistency checks on tree <tree-name>
> .validate <tree-name>

drop all trees
> .nuke

Supported commands:
-------------------
The following lists supported commands, and an example. For the complete grammar see lang_parser/grammar.py

Create tree (branching factor defaults to 128)
> create tree fruits branching 4

Drop tree
> drop tree fruits

Insert (or update) a key
> insert into fruits values (3, 'mango')

Delete a key
> delete from fruits where key = 3

Select all entries, a single key, or a key range
> select from fruits
> select from fruits where key = 3
> select from fruits where key between 3 and 7
> select from fruits where key > 3 and key <= 7
'''
