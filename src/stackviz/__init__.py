"""Desktop front end for the stack simulation engine."""
