# lark grammar for the tree command language
GRAMMAR = r'''
        program          : stmnt (";" stmnt)* ";"?

        ?stmnt           : create_stmnt | drop_stmnt | insert_stmnt | delete_stmnt | select_stmnt

        create_stmnt     : "create"i "tree"i tree_name branching_clause?
        branching_clause : "branching"i INTEGER_NUMBER

        drop_stmnt       : "drop"i "tree"i tree_name

        insert_stmnt     : "insert"i "into"i tree_name "values"i "(" literal "," literal ")"

        delete_stmnt     : "delete"i "from"i tree_name "where"i key_equals

        select_stmnt     : "select"i "from"i tree_name where_clause?

        // a select can be filtered on one key or a key range
        ?where_clause    : "where"i (key_equals | key_between | key_range)
        key_equals       : "key"i "=" literal
        key_between      : "key"i "between"i literal "and"i literal
        key_range        : "key"i LOWER_OP literal "and"i "key"i UPPER_OP literal

        tree_name        : IDENTIFIER

        literal          : INTEGER_NUMBER       -> integer
                         | REAL_NUMBER          -> real
                         | STRING               -> string
                         | "null"i              -> null

        LOWER_OP         : ">=" | ">"
        UPPER_OP         : "<=" | "<"

        IDENTIFIER       : ("_" | LETTER) ("_" | LETTER | DIGIT)*

        // NOTE: reals require a fractional part, so that
        // an integer can never be read as a real
        REAL_NUMBER      : /[+-]?\d+\.\d+/
        INTEGER_NUMBER   : /[+-]?\d+/

        // single quoted string
        // NOTE: this doesn't have any support for escaping
        SINGLE_QUOTED_STRING  : /'[^']*'/
        STRING: SINGLE_QUOTED_STRING | DOUBLE_QUOTED_STRING

        // ref: https://github.com/lark-parser/lark/blob/master/lark/grammars/common.lark
        %import common.ESCAPED_STRING   -> DOUBLE_QUOTED_STRING
        %import common.LETTER
        %import common.DIGIT
        %import common.WS
        %ignore WS
'''
