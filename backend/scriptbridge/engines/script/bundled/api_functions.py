# Sample functions exported to the macro language.
# Evaluated in the script sandbox: ExportedFunction, ResultBuilder, log and
# random are provided by the evaluator, nothing is imported.

f1 = ExportedFunction("listSum", ExportedFunction.DATA_TYPE_DOUBLE, "do_list_sum")
f1.add_parameter("nums", ExportedFunction.DATA_TYPE_LIST_VARARGS)
f1.export()
del f1

f2 = ExportedFunction("listSumR", ExportedFunction.DATA_TYPE_RESULT, "do_list_sum_r")
f2.add_parameter("nums", ExportedFunction.DATA_TYPE_LIST_VARARGS)
f2.export()
del f2

f3 = ExportedFunction("showResult", ExportedFunction.DATA_TYPE_STRING, "do_show_result")
f3.add_parameter("res", ExportedFunction.DATA_TYPE_RESULT)
f3.export()
del f3

roll_func = ExportedFunction("rollSomeDice", ExportedFunction.DATA_TYPE_RESULT, "do_roll_some_dice")
roll_func.add_parameter("num", ExportedFunction.DATA_TYPE_LONG, 1)
roll_func.add_parameter("sides", ExportedFunction.DATA_TYPE_LONG)
roll_func.export()
del roll_func


def join_values(values, delim):
    return delim.join([str(v) for v in values])


def do_list_sum(args):
    return sum(args.nums)


def do_list_sum_r(args):
    total = 0
    vals = []
    for n in args.nums:
        vals.append(n)
        total += n
    return (
        ResultBuilder()
        .set_value(total)
        .set_details(join_values(vals, " + "))
        .set_individual_values(vals)
        .build()
    )


def do_show_result(args):
    res = args.res
    return (
        "Result found: value = " + str(res.value)
        + ", details = " + str(res.details)
        + ", individual = " + str(list(res.individual))
    )


def roll(sides):
    return random.randint(1, sides)


def do_roll_some_dice(args):
    if args.sides < 1:
        log.warn("rollSomeDice called with %s sides", args.sides)
    rolls = [roll(args.sides) for i in range(args.num)]
    # A plain mapping with a "value" key converts to a RESULT as well
    return {"value": sum(rolls), "details": join_values(rolls, " + "), "individual": rolls}
